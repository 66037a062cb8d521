import secrets

ID_BYTES = 9
OBJECT_SUFFIX = ".jpg"


def new_object_id() -> str:
    return secrets.token_hex(ID_BYTES)


def object_key_for(object_id: str) -> str:
    return f"{object_id}{OBJECT_SUFFIX}"
