"""Shape of the AI-generated portfolio analysis."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PortfolioAnalysis(BaseModel):
    """Validated analysis payload; field names match the prompt's JSON contract."""

    model_config = ConfigDict(extra="ignore")

    summary: str = Field(..., min_length=1)
    riskLevel: Literal["Low", "Medium", "High"]
    riskAnalysis: str
    composition: str
    diversification: str
    suggestions: list[str]
