from datetime import datetime

from fluency_levels import FluencyLevel
from schemas.base import CamelModel


class Certificate(CamelModel):
    id: str
    user_id: str
    user_name: str | None = None
    level: FluencyLevel
    issued_at: datetime
    issued_by: str
    certificate_number: str
