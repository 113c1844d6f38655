from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


class Database:
    """アプリケーション1つ分のエンジンとセッションファクトリ"""

    def __init__(self, url: str, echo: bool = False):
        if url.startswith("sqlite"):
            self.engine = create_engine(url, connect_args={"check_same_thread": False}, echo=echo)
        else:
            self.engine = create_engine(url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self):
        # モデルをインポート（テーブル作成のため）
        from canteen import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self):
        from canteen import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self):
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.context.database.session()
    try:
        yield db
    finally:
        db.close()
