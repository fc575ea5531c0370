"""Normalisering av dokumentoptioner och bygge av query-strängar.

Sendcloud godtar bara vissa DPI-värden per filformat:
  pdf → 72
  zpl → 203, 300, 600
  png → 150, 300

Ogiltiga värden ersätts tyst med formatets standard-DPI i stället för
att ge fel. Okänt eller saknat format ger alltid pdf/72.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional

from .models import FileFormat

ALLOWED_DPI = {
    FileFormat.PDF: (72,),
    FileFormat.ZPL: (203, 300, 600),
    FileFormat.PNG: (150, 300),
}

# Ersättning vid ogiltig eller saknad DPI
DEFAULT_DPI = {
    FileFormat.PDF: 72,
    FileFormat.ZPL: 203,
    FileFormat.PNG: 300,
}


def _to_file_format(value) -> Optional[FileFormat]:
    if isinstance(value, FileFormat):
        return value
    try:
        return FileFormat(value)
    except ValueError:
        return None


def normalize_document_options(options: Optional[Mapping] = None) -> dict:
    """Returnerar options med en format/dpi-kombination som API:et godtar.

    Saknad DPI behandlas som 0, vilket är ogiltigt för alla format och
    därmed ger formatets standardvärde.

    Känt format: bara "dpi" ändras (och "format" blir strängvärdet),
    övriga nycklar och deras ordning behålls. Okänt eller saknat format:
    hela objektet ersätts med {"format": "pdf", "dpi": 72}.

    Anroparens mapping ändras inte, en kopia returneras.
    """
    if options is None:
        options = {"format": FileFormat.PDF}

    result = dict(options)
    dpi = result.get("dpi") or 0
    file_format = _to_file_format(result.get("format"))

    if file_format is None:
        return {"format": FileFormat.PDF.value, "dpi": DEFAULT_DPI[FileFormat.PDF]}

    if dpi in ALLOWED_DPI[file_format]:
        # 300.0 → 300, annars hamnar "dpi=300.0" i query-strängen
        dpi = int(dpi)
    else:
        dpi = DEFAULT_DPI[file_format]

    result["format"] = file_format.value
    result["dpi"] = dpi
    return result


def _render_value(value) -> str:
    # API:et förväntar sig true/false, inte Pythons True/False
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def build_query_string(params=None) -> str:
    """Bygger "?a=1&b=x" av en platt mapping, eller "" om den är tom.

    Ordningen följer insättningsordningen. Värden URL-kodas INTE, t.ex.
    ger {"q": "a b"} strängen "?q=a b". Nycklar med värdet None hoppas
    över. Query-dataklasser (med to_params()) går också bra.
    """
    if params is None:
        return ""
    if hasattr(params, "to_params"):
        params = params.to_params()

    query = ""
    for key, value in params.items():
        if value is None:
            continue
        query += "&" if query else "?"
        query += f"{key}={_render_value(value)}"
    return query
