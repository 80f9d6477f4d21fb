"""Display-name helpers."""
import re

_PARENTHESISED = re.compile(r"\s*\([^)]*\)")


def clean_team_name(team_name: str | None) -> str:
    """
    Strip parenthesised qualifiers from a team name.

    Examples:
        >>> clean_team_name("T1 (Korean Team)")
        'T1'
        >>> clean_team_name(None)
        ''
    """
    if not team_name:
        return ""
    return _PARENTHESISED.sub("", team_name).strip()
