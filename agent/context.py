"""Per-request context passed explicitly through the agent stack."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, MutableMapping


class RequestLogAdapter(logging.LoggerAdapter):
    """Prefix records with the request id and attach the context as ``extra``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return f"[{extra.get('request_id')}] {msg}", kwargs


@dataclass
class RequestContext:
    """Identity and logger for one chat request.

    Attributes:
        request_id: Unique id of this request, used to correlate log records.
        project_id: Project being edited, if any.
        logger: Adapter that stamps every record with the ids above.
    """

    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    project_id: str | None = None
    logger: logging.LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = RequestLogAdapter(
            logging.getLogger("agent.request"),
            {"request_id": self.request_id, "project_id": self.project_id},
        )
