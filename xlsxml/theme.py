"""The DrawingML ``theme`` part: the colour scheme of a workbook theme."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from .worksheet import Source, _Attrs, _child, _children, _local, _read_root


@dataclass
class SysClr:
    """A system colour together with the last concrete value it had."""

    val: str = ""
    last_clr: str = ""


@dataclass
class SrgbClr:
    """An explicit RGB colour."""

    val: str = ""


@dataclass
class ClrSchemeEntry:
    """One named slot of a colour scheme, such as ``dk1`` or ``accent1``."""

    name: str = ""
    sys_clr: SysClr | None = None
    srgb_clr: SrgbClr | None = None


@dataclass
class ClrScheme:
    name: str = ""
    children: list[ClrSchemeEntry] = field(default_factory=list)


@dataclass
class Theme:
    clr_scheme: ClrScheme = field(default_factory=ClrScheme)


def _parse_entry(element: ET.Element) -> ClrSchemeEntry:
    sys_el = _child(element, "sysClr")
    srgb_el = _child(element, "srgbClr")
    return ClrSchemeEntry(
        name=_local(element.tag),
        sys_clr=(
            SysClr(val=_Attrs(sys_el).text("val"), last_clr=_Attrs(sys_el).text("lastClr"))
            if sys_el is not None
            else None
        ),
        srgb_clr=SrgbClr(val=_Attrs(srgb_el).text("val")) if srgb_el is not None else None,
    )


def _parse_clr_scheme(element: ET.Element) -> ClrScheme:
    return ClrScheme(
        name=_Attrs(element).text("name"),
        children=[_parse_entry(c) for c in element if isinstance(c.tag, str)],
    )


def parse_theme(source: Source) -> Theme:
    """Read a theme part from XML text, bytes or a file object."""
    root = _read_root(source)
    theme = Theme()
    for elements in _children(root, "themeElements"):
        for scheme in _children(elements, "clrScheme"):
            theme.clr_scheme = _parse_clr_scheme(scheme)
    return theme