from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from helpdesk.auth.actor import Actor
from helpdesk.auth.dependencies import get_current_actor
from helpdesk.categories.schemas.category import (
    CategoryCreate,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from helpdesk.categories.services.category_service import CategoryService
from helpdesk.core.schemas import ApiResponse, success_response
from helpdesk.db.session import get_db

router = APIRouter()


@router.get("/complaint-categories", response_model=ApiResponse[list[CategoryTreeNode]])
def list_categories(
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[list[CategoryTreeNode]]:
    return success_response(CategoryService(db).list_categories())


@router.get("/complaint-categories/active", response_model=ApiResponse[list[CategoryTreeNode]])
def list_active_categories(
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[list[CategoryTreeNode]]:
    return success_response(CategoryService(db).list_active_categories())


@router.get("/complaint-categories/{category_id}", response_model=ApiResponse[CategoryTreeNode])
def get_category(
    category_id: int,
    _actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[CategoryTreeNode]:
    return success_response(CategoryService(db).get_category(category_id))


@router.post(
    "/complaint-categories", response_model=ApiResponse[CategoryResponse], status_code=201
)
def create_category(
    data: CategoryCreate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[CategoryResponse]:
    category = CategoryService(db).create_category(data, actor)
    return success_response(
        CategoryResponse.model_validate(category), message="Category created successfully"
    )


@router.put("/complaint-categories/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(
    category_id: int,
    data: CategoryUpdate,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[CategoryResponse]:
    category = CategoryService(db).update_category(category_id, data, actor)
    return success_response(
        CategoryResponse.model_validate(category), message="Category updated successfully"
    )


@router.delete("/complaint-categories/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: int,
    actor: Actor = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ApiResponse[None]:
    CategoryService(db).delete_category(category_id, actor)
    return success_response(None, message="Category deleted successfully")
