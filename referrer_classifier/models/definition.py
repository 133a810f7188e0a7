"""Search engine definition models."""

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class LiteralParam(BaseModel):
    """Keyword carried by a named query string parameter."""
    
    model_config = ConfigDict(frozen=True)
    
    kind: Literal["literal"] = "literal"
    name: str = Field(..., min_length=1, description="Query string parameter name")
    
    @property
    def raw(self) -> str:
        return self.name


class PatternParam(BaseModel):
    """Keyword captured by the first group of a regular expression over the full URL."""
    
    model_config = ConfigDict(frozen=True)
    
    kind: Literal["pattern"] = "pattern"
    source: str = Field(..., description="Delimited expression as written in the definitions")
    regex: re.Pattern = Field(..., description="Compiled expression")
    
    @property
    def raw(self) -> str:
        return self.source


ParamRule = Annotated[Union[LiteralParam, PatternParam], Field(discriminator="kind")]


class SearchEngineDefinition(BaseModel):
    """Metadata attached to one URL pattern of the catalog."""
    
    model_config = ConfigDict(frozen=True)
    
    name: str = Field(..., description="Search engine name, e.g. 'Google'")
    params: Tuple[ParamRule, ...] = Field(default=(), description="Keyword rules, in order")
    backlink: Optional[str] = Field(None, description="Search URL pattern with a {k} placeholder")
    charsets: Tuple[str, ...] = Field(default=(), description="Keyword encodings, first is the default")
    
    def to_raw(self) -> Dict[str, Any]:
        """Serialize back to the block shape of the definitions document (without urls)."""
        data: Dict[str, Any] = {"name": self.name}
        if self.params:
            data["params"] = [rule.raw for rule in self.params]
        if self.backlink:
            data["backlink"] = self.backlink
        if self.charsets:
            data["charsets"] = list(self.charsets)
        return data
    
    def parameter_names(self) -> List[str]:
        """Raw parameter strings, regular expressions included."""
        return [rule.raw for rule in self.params]
