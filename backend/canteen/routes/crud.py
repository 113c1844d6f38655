from typing import List, Type

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from canteen.database import get_db
from canteen.services.repository import Repository
from canteen.utils.jwt_auth import require_permission


def build_crud_router(
    collection: str,
    repository: Repository,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
) -> APIRouter:
    """
    /api/<collection> に POST / GET / PUT /{id} / DELETE /{id} を登録する。

    ボディの検証はエンティティごとのスキーマで行う。
    """
    router = APIRouter(prefix=f"/api/{collection}", tags=[collection])
    can_read = require_permission(collection, "read")
    can_write = require_permission(collection, "write")

    @router.post("", response_model=read_schema, status_code=201)
    def create_item(data: create_schema, current_user=Depends(can_write), db: Session = Depends(get_db)):
        return repository.create(db, data)

    @router.get("", response_model=List[read_schema])
    def list_items(current_user=Depends(can_read), db: Session = Depends(get_db)):
        return repository.list(db)

    @router.get("/{item_id}", response_model=read_schema)
    def get_item(item_id: str, current_user=Depends(can_read), db: Session = Depends(get_db)):
        return repository.get(db, item_id)

    @router.put("/{item_id}", response_model=read_schema)
    def update_item(item_id: str, data: update_schema, current_user=Depends(can_write), db: Session = Depends(get_db)):
        return repository.update(db, item_id, data)

    @router.delete("/{item_id}", status_code=204)
    def delete_item(item_id: str, current_user=Depends(can_write), db: Session = Depends(get_db)):
        repository.delete(db, item_id)
        return Response(status_code=204)

    return router
