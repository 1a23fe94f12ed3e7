"""${variable} substitution for command templates and remote output."""

import re
from collections.abc import Mapping

from .exceptions import SubstitutionError

# ${name}; names may contain dots, e.g. ${_user.name}
VARIABLE_PATTERN = re.compile(r"\$\{([A-Za-z0-9_.\-]+)\}")


def find_variables(template: str) -> list[str]:
    """Return referenced variable names in order of first appearance."""
    seen: dict[str, None] = {}
    for match in VARIABLE_PATTERN.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every ${name} in template with variables[name].

    Raises:
        SubstitutionError: if any referenced variable has no value. Nothing
            is partially substituted in that case.
    """
    missing = [name for name in find_variables(template) if name not in variables]
    if missing:
        names = ", ".join(f"'{name}'" for name in missing)
        raise SubstitutionError(
            f"no value for variable(s) {names} in command", missing=missing
        )
    return VARIABLE_PATTERN.sub(lambda m: str(variables[m.group(1)]), template)
