"""
Assignment Application DTOs
===========================
"""

from pydantic import BaseModel, ConfigDict, Field


class ReassignDTO(BaseModel):
    """DTO for manual reassignment."""
    model_config = ConfigDict(str_strip_whitespace=True)

    agent_id: str = Field(..., min_length=1, description="Agent receiving the ticket")
