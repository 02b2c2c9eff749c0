"""
Явный контекст запроса для mapper'а вместо глобального $_POST / is_ssl().

Ключи формы вида blog[domain_map] разворачиваются во вложенные словари:
    {'blog[domain_map]': '1'} → {'blog': {'domain_map': '1'}}
"""
import re
from dataclasses import dataclass, field

_NESTED_KEY_RE = re.compile(r'^([^\[\]]+)((?:\[[^\[\]]*\])*)$')
_SEGMENT_RE = re.compile(r'\[([^\[\]]*)\]')


def parse_nested_form(items):
    """Развернуть пары (key, value) формы во вложенный dict."""
    result = {}
    for key, value in items:
        match = _NESTED_KEY_RE.match(key)
        if not match:
            result[key] = value
            continue
        parts = [match.group(1)] + _SEGMENT_RE.findall(match.group(2))
        node = result
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value
    return result


@dataclass(frozen=True)
class RequestContext:
    data: dict = field(default_factory=dict)
    is_secure: bool = False

    @classmethod
    def from_request(cls, request):
        return cls(
            data=parse_nested_form(request.POST.items()),
            is_secure=request.is_secure(),
        )

    def get(self, *keys, default=None):
        """Вложенный lookup: ctx.get('blog', 'domain_map')."""
        node = self.data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    @property
    def blog(self):
        blog = self.data.get('blog')
        return blog if isinstance(blog, dict) else {}
