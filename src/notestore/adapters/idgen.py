import secrets

from ..core.model import NoteId


class RandomId:
    def __init__(self, nbytes: int = 12):  # 12 bytes -> 24 hex chars
        self.nbytes = nbytes

    def new_id(self) -> NoteId:
        return secrets.token_hex(self.nbytes)
