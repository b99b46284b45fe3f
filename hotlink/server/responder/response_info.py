from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ResponseInfo:
    content: bytes | str
    content_type: str = "text/plain"
    status_code: int = 200

    @property
    def body(self) -> bytes:
        if isinstance(self.content, str):
            return self.content.encode()

        return self.content
