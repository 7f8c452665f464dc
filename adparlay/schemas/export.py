from pydantic import BaseModel
from typing import List


class SubmissionExportRequest(BaseModel):
    form_ids: List[str]
