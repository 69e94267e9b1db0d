from pydantic import BaseModel, Field
from typing import Literal


class IndexConfig(BaseModel):
    on_duplicate: Literal["reject", "merge"] = "reject"
    thread_safe: bool = True


class PolisConfig(BaseModel):
    index: IndexConfig = Field(default_factory=IndexConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
