from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from httplens.parser import ParseReport


class CommandPayload(BaseModel):
    """Arguments of ``http.sendRequest``: document URI and anchor line."""

    uri: str = Field(min_length=1)
    line: int = Field(ge=0)

    def as_arguments(self) -> list[object]:
        return [self.uri, self.line]

    @classmethod
    def from_arguments(cls, arguments: Sequence[object]) -> CommandPayload:
        values = list(arguments)
        return cls.model_validate(
            {
                "uri": values[0] if len(values) > 0 else None,
                "line": values[1] if len(values) > 1 else None,
            },
            strict=False,
        )


class RequestDTO(BaseModel):
    method: str
    url: str
    line: int
    headers: Dict[str, str] = {}
    body: Optional[str] = None


class RejectionDTO(BaseModel):
    line: int
    url: str
    reason: str


class ParseReportDTO(BaseModel):
    requests: List[RequestDTO] = []
    rejections: List[RejectionDTO] = []

    @classmethod
    def from_report(cls, report: ParseReport) -> ParseReportDTO:
        return cls(
            requests=[
                RequestDTO(
                    method=request.method.value,
                    url=request.url,
                    line=request.line,
                    headers=dict(request.headers),
                    body=request.body,
                )
                for request in report.requests
            ],
            rejections=[
                RejectionDTO(line=item.line, url=item.url, reason=item.reason)
                for item in report.rejections
            ],
        )
