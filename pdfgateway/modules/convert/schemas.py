"""Convert module schemas."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_FORMAT = "A4"
DEFAULT_MARGIN = "20mm"


class ConvertOptions(BaseModel):
    """PDF options as sent by clients (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    format: str | None = Field(default=None, description="A4, A3, Letter, etc.")
    margin_top: str | None = Field(default=None, alias="marginTop")
    margin_right: str | None = Field(default=None, alias="marginRight")
    margin_bottom: str | None = Field(default=None, alias="marginBottom")
    margin_left: str | None = Field(default=None, alias="marginLeft")
    print_background: bool | None = Field(default=None, alias="printBackground")


class ConvertRequest(BaseModel):
    """
    Request to convert HTML to PDF.

    ``html`` is optional here so a missing value is reported as a 400 by the
    service rather than a schema error.
    """

    html: str | None = Field(default=None, description="HTML content to convert")
    filename: str | None = Field(default=None, description="Output filename")
    options: ConvertOptions | None = None


class RenderOptions(BaseModel):
    """Fully resolved options passed to the PDF exporter."""

    format: str = DEFAULT_FORMAT
    margin: dict[str, str] = Field(
        default_factory=lambda: {
            "top": DEFAULT_MARGIN,
            "right": DEFAULT_MARGIN,
            "bottom": DEFAULT_MARGIN,
            "left": DEFAULT_MARGIN,
        }
    )
    print_background: bool = True
    prefer_css_page_size: bool = True
    display_header_footer: bool = False

    @classmethod
    def from_request(cls, options: ConvertOptions | None) -> "RenderOptions":
        """Apply defaults; empty values fall back rather than error."""
        options = options or ConvertOptions()
        return cls(
            format=options.format or DEFAULT_FORMAT,
            margin={
                "top": options.margin_top or DEFAULT_MARGIN,
                "right": options.margin_right or DEFAULT_MARGIN,
                "bottom": options.margin_bottom or DEFAULT_MARGIN,
                "left": options.margin_left or DEFAULT_MARGIN,
            },
            # Only an explicit false turns backgrounds off
            print_background=options.print_background is not False,
        )

    def to_pdf_kwargs(self) -> dict[str, Any]:
        return self.model_dump()


@dataclass
class PdfArtifact:
    """Rendered PDF plus the metadata needed to send it."""

    content: bytes
    filename: str
    elapsed_ms: int

    @property
    def size(self) -> int:
        return len(self.content)
