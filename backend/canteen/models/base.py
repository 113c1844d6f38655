import uuid


def new_id() -> str:
    """ストア側で払い出す一意ID（32桁の16進文字列）"""
    return uuid.uuid4().hex
