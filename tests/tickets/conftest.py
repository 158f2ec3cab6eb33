"""
Test fixtures for ticket tests.
"""

import pytest
from sqlalchemy.orm import Session

from tests.utils.factories import create_category_factory


@pytest.fixture
def main_category(db_session: Session):
    return create_category_factory(db_session, name="Hostel", display_order=1)


@pytest.fixture
def sub_category(db_session: Session, main_category):
    return create_category_factory(db_session, name="Plumbing", parent=main_category)


@pytest.fixture
def other_category(db_session: Session):
    return create_category_factory(db_session, name="Transport", display_order=2)
