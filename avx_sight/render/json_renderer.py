"""JSON renderer for discovered plugins."""

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from avx_sight.models import PluginRecord


class JSONRenderer:
    """Renders plugin records as JSON.

    Produces output in the format:
    [
      {"identity": "...", "name": "...", "kind": "AudioUnit", ...},
      ...
    ]
    """

    def render(self, records: list["PluginRecord"]) -> str:
        """Render records as a JSON array, in the order given.

        Example:
            >>> renderer = JSONRenderer()
            >>> print(renderer.render([record]))
            [
              {
                "identity": "/Library/Audio/Plug-Ins/Components/Reverb.component",
                "name": "Reverb",
                "kind": "AudioUnit",
                ...
              }
            ]
        """
        return json.dumps([record.to_dict() for record in records], indent=2, ensure_ascii=False)

    def render_detail(self, record: "PluginRecord") -> str:
        """Render a single record as a JSON object."""
        return json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
