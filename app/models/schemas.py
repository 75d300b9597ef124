from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from app.models.models import ApplicantProfile


# -------- Search request --------
class SearchRequest(BaseModel):
    """Body of POST /api/scholarships/search"""
    model_config = ConfigDict(populate_by_name=True)

    user_profile: Optional[ApplicantProfile] = Field(default=None, alias="userProfile")
