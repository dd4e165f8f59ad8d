from dataclasses import dataclass, field
from typing import Optional


# Markup version labels reported by the parser
HTML5 = "HTML5"
XHTML = "XHTML"
UNKNOWN = "Unknown"
MARKUP_VERSIONS = (HTML5, XHTML, UNKNOWN)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


def empty_headings() -> dict[str, int]:
    return {tag: 0 for tag in HEADING_TAGS}


@dataclass
class BrokenLink:
    url: str
    status_code: int                        # 0 when the probe never got a response
    error_message: Optional[str] = None     # transport failures only

    def to_dict(self) -> dict:
        data = {"url": self.url, "status_code": self.status_code}
        if self.error_message:
            data["error_message"] = self.error_message
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "BrokenLink":
        return cls(
            url=data["url"],
            status_code=data.get("status_code", 0),
            error_message=data.get("error_message"),
        )


@dataclass
class PageAnalysis:
    url: str
    html_version: str = UNKNOWN             # HTML5 | XHTML | Unknown
    title: str = ""

    headings: dict[str, int] = field(default_factory=empty_headings)

    # link counters, one increment per anchor occurrence
    internal_links: int = 0
    external_links: int = 0
    inaccessible_links: int = 0
    broken_links: list[BrokenLink] = field(default_factory=list)

    has_login_form: bool = False

    def summary(self) -> dict:
        """Fields returned to the caller of a single analysis."""
        return {
            "html_version": self.html_version,
            "title": self.title,
            "headings": dict(self.headings),
            "internal_links": self.internal_links,
            "external_links": self.external_links,
            "inaccessible_links": self.inaccessible_links,
            "has_login_form": self.has_login_form,
        }


@dataclass
class RerunSummary:
    success_count: int = 0
    failed_count: int = 0
    failed_urls: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {k: v for k, v in self.__dict__.items()}
