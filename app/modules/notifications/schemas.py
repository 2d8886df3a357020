from pydantic import BaseModel


class NotificationChannels(BaseModel):
    push: bool = False
    sms: bool = False
    email: bool = False

    @property
    def any(self) -> bool:
        return self.push or self.sms or self.email


class NotificationResult(BaseModel):
    push: int = 0
    sms: int = 0
    email: int = 0
