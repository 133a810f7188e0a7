"""Result models returned by the classifier."""

from typing import Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class ResolvedHost(BaseModel):
    """A referrer whose URL pattern was found in the catalog."""
    
    model_config = ConfigDict(frozen=True)
    
    referrer_url: str = Field(..., description="The referrer URL as received")
    key: str = Field(..., description="Catalog key the referrer resolved to")
    host: str = Field(..., description="Host parsed from the referrer")
    path: str = Field(default="", description="Path parsed from the referrer")
    query: str = Field(default="", description="Query string, with the fragment appended")
    fragment: str = Field(default="", description="Fragment parsed from the referrer")


class MatchResult(BaseModel):
    """Search engine and keyword detected for a referrer."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str = Field(..., description="Search engine name")
    keywords: Union[Literal[False], str] = Field(
        ..., description="Lowercased keyword, or False when the engine matched without one"
    )
    
    @property
    def has_keyword(self) -> bool:
        return self.keywords is not False
    
    def as_dict(self) -> Dict[str, Union[str, bool]]:
        return {"name": self.name, "keywords": self.keywords}
