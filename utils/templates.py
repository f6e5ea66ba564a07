"""
Message template pools with random and round-robin selection.

Each pool owns its own cursor, so rotating channel invitations does not affect the
anniversary texts and tests can start from a fresh pool.
"""

import random


class TemplatePool:
    """A fixed list of templates with a wrapping cursor."""

    def __init__(self, templates, rng=None):
        self.templates = [template for template in templates if template]
        if not self.templates:
            raise ValueError("TemplatePool requires at least one non-empty template")
        self._cursor = 0
        self._rng = rng or random.Random()

    def __len__(self):
        return len(self.templates)

    @property
    def cursor(self):
        return self._cursor

    def random(self) -> str:
        """Pick any template."""
        return self._rng.choice(self.templates)

    def next(self) -> str:
        """Return the template under the cursor and advance it, wrapping at the end."""
        result = self.templates[self._cursor]
        self._cursor = (self._cursor + 1) % len(self.templates)
        return result

    def reset(self):
        self._cursor = 0


def render(template: str, **values) -> str:
    """
    Substitute %name% placeholders

    Args:
        template: Text such as "@%username% is having a birthday soon"
        **values: Placeholder values

    Returns:
        Rendered text; unknown placeholders are left untouched
    """
    for name, value in values.items():
        template = template.replace(f"%{name}%", str(value))
    return template
