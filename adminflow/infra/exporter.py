"""表格数据导出器.

CSV 输出会对可能被电子表格解析为公式的单元格加 `'` 前缀,
防护 Spreadsheet Formula Injection.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Final

from adminflow.errors import InvalidExportFormatError

if TYPE_CHECKING:
    from adminflow.types import JsonValue

FORMULA_PREFIXES: Final[tuple[str, ...]] = ("=", "+", "-", "@", "\t", "\r")

CSV_MIMETYPE = "text/csv; charset=utf-8"
JSON_MIMETYPE = "application/json; charset=utf-8"


def neutralize_formula(value: object) -> object:
    """单元格以公式前缀开头时加 `'` 前缀,None 输出为空串."""
    if value is None:
        return ""
    if isinstance(value, str) and value.lstrip(" ").startswith(FORMULA_PREFIXES):
        return f"'{value}"
    return value


class TabularExporter:
    """把数据行写为 csv 或 json 文本."""

    formats: tuple[str, ...] = ("csv", "json")

    def export(self, fmt: str, rows: Iterable[Mapping[str, JsonValue]]) -> tuple[str, str]:
        """导出数据行.

        Returns:
            (文件内容, mimetype).

        Raises:
            InvalidExportFormatError: 不支持的格式.

        """
        if fmt == "csv":
            return self._to_csv(rows), CSV_MIMETYPE
        if fmt == "json":
            return json.dumps(list(map(dict, rows)), ensure_ascii=False, default=str), JSON_MIMETYPE
        raise InvalidExportFormatError(f"导出器不支持格式 {fmt!r}", extra={"format": fmt})

    @staticmethod
    def _to_csv(rows: Iterable[Mapping[str, JsonValue]]) -> str:
        output = io.StringIO()
        writer = csv.writer(output)
        header: list[str] | None = None
        for row in rows:
            if header is None:
                header = list(row.keys())
                writer.writerow(header)
            writer.writerow([neutralize_formula(row.get(name)) for name in header])
        return output.getvalue()
