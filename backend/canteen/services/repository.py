import logging
from typing import Callable, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from canteen.database import Base
from canteen.errors import Conflict, Internal, NotFound

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
CreateT = TypeVar("CreateT", bound=BaseModel)
UpdateT = TypeVar("UpdateT", bound=BaseModel)


class Repository(Generic[ModelT, CreateT, UpdateT]):
    """
    1エンティティ（1テーブル）分の create / list / get / update / delete。

    入力は各エンティティ専用の pydantic スキーマで検証済みのものを受け取る。
    unique_field を指定すると重複時に Conflict を返す。
    """

    def __init__(self, model: Type[ModelT], label: str, unique_field: Optional[str] = None,
                 order_by: Optional[Callable] = None):
        self.model = model
        self.label = label
        self.unique_field = unique_field
        self.order_by = order_by

    def _check_unique(self, db: Session, value, exclude_id: Optional[str] = None):
        if self.unique_field is None or value is None:
            return
        column = getattr(self.model, self.unique_field)
        query = db.query(self.model).filter(column == value)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        if query.first():
            raise Conflict(f"{self.label} with this {self.unique_field} already exists")

    def _commit(self, db: Session, action: str):
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict(f"{self.label} violates a unique constraint")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Error %s %s: %s", action, self.label, e)
            raise Internal(f"Error {action} {self.label}")

    def create_from_values(self, db: Session, values: dict) -> ModelT:
        if self.unique_field:
            self._check_unique(db, values.get(self.unique_field))
        item = self.model(**values)
        db.add(item)
        self._commit(db, "creating")
        db.refresh(item)
        return item

    def create(self, db: Session, data: CreateT) -> ModelT:
        return self.create_from_values(db, data.model_dump())

    def list(self, db: Session) -> List[ModelT]:
        query = db.query(self.model)
        if self.order_by is not None:
            query = query.order_by(self.order_by(self.model))
        return query.all()

    def get(self, db: Session, item_id: str) -> ModelT:
        item = db.get(self.model, item_id)
        if item is None:
            raise NotFound(f"{self.label} not found")
        return item

    def update_from_values(self, db: Session, item_id: str, values: dict) -> ModelT:
        item = self.get(db, item_id)
        if self.unique_field and self.unique_field in values:
            self._check_unique(db, values[self.unique_field], exclude_id=item_id)
        for key, value in values.items():
            setattr(item, key, value)
        self._commit(db, "updating")
        db.refresh(item)
        return item

    def update(self, db: Session, item_id: str, data: UpdateT) -> ModelT:
        # 送られてきた項目だけを更新
        return self.update_from_values(db, item_id, data.model_dump(exclude_unset=True, exclude_none=True))

    def delete(self, db: Session, item_id: str) -> ModelT:
        item = self.get(db, item_id)
        db.delete(item)
        self._commit(db, "deleting")
        return item
