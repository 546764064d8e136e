import json

import yaml

from stratacache.core.ports.render import Renderer


class JsonRenderer(Renderer):
    def render(self, data: dict) -> str:
        return json.dumps(self._normalize(data), indent=2, sort_keys=False)

    def _normalize(self, obj):
        if isinstance(obj, dict):
            return {k: self._normalize(v) for k, v in obj.items()}

        if isinstance(obj, (list, tuple)):
            return [self._normalize(x) for x in obj]

        return obj


class YamlRenderer(JsonRenderer):
    def render(self, data: dict) -> str:
        return yaml.safe_dump(self._normalize(data), sort_keys=False)
