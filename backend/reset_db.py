#!/usr/bin/env python
"""データベースをリセットするスクリプト"""
from canteen.config import Settings
from canteen.database import Database

if __name__ == "__main__":
    settings = Settings.from_env()
    database = Database(settings.database_url)

    # テーブルをすべて削除
    print("Dropping existing tables...")
    database.drop_all()

    # 新しいテーブルを作成
    print("Creating tables...")
    database.create_all()

    database.dispose()
    print("Database reset complete")
