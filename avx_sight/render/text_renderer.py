"""Plain-text renderer for discovered plugins."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from avx_sight.models import PluginRecord


class TextRenderer:
    """Renders plugin records for a terminal.

    The list view shows one entry per plugin (name and type); the detail view
    shows every known field, with unavailable metadata shown as ``-``.
    """

    def render(self, records: list["PluginRecord"]) -> str:
        """Render a list of records, in the order given.

        Example:
            >>> print(TextRenderer().render([record]))
            Found 1 plugin(s):
            <BLANKLINE>
              Reverb
                Type: AudioUnit
        """
        if not records:
            return "No plugins found."

        lines = [f"Found {len(records)} plugin(s):", ""]
        for record in records:
            lines.append(f"  {record.name}")
            lines.append(f"    Type: {record.kind.value}")
            if record.domain:
                lines.append(f"    Domain: {record.domain.value}")
        return "\n".join(lines)

    def render_detail(self, record: "PluginRecord") -> str:
        """Render every field of one record."""
        rows = [
            ("Name", record.name),
            ("Type", record.kind.value),
            ("Path", record.identity),
            ("Domain", record.domain.value if record.domain else None),
            ("Version", record.version),
            ("Manufacturer", record.manufacturer),
            ("Description", record.description),
        ]
        width = max(len(label) for label, _ in rows) + 1

        lines = ["Plugin Details"]
        for label, value in rows:
            lines.append(f"  {label + ':':<{width}} {value if value is not None else '-'}")
        return "\n".join(lines)
