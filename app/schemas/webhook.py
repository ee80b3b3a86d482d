from pydantic import BaseModel


class WebhookResult(BaseModel):
    status: str = "ok"
    notified: int = 0
    reason: str | None = None
