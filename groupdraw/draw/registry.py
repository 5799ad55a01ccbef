"""
Static pot and host definitions.

A registry owns no mutable state: it describes the four pots, the group names
and the host teams that are seated before the first pot is drawn.
"""

from typing import Optional

from groupdraw.models import Team, Group

TOTAL_GROUPS = 12
TOTAL_POTS = 4
GROUP_NAMES = ['A', 'B', 'C', 'D', 'E', 'F', 'G', 'H', 'I', 'J', 'K', 'L']

FLAGS = {
    # Pot 1
    'Canada (Host)': '🇨🇦', 'Mexico (Host)': '🇲🇽', 'USA (Host)': '🇺🇸',
    'Spain': '🇪🇸', 'Argentina': '🇦🇷', 'France': '🇫🇷',
    'England': '🏴󠁧󠁢󠁥󠁮󠁧󠁿', 'Brazil': '🇧🇷', 'Portugal': '🇵🇹',
    'Netherlands': '🇳🇱', 'Belgium': '🇧🇪', 'Germany': '🇩🇪',
    # Pot 2
    'Croatia': '🇭🇷', 'Morocco': '🇲🇦', 'Colombia': '🇨🇴',
    'Uruguay': '🇺🇾', 'Switzerland': '🇨🇭', 'Japan': '🇯🇵',
    'Senegal': '🇸🇳', 'Iran': '🇮🇷', 'South Korea': '🇰🇷',
    'Ecuador': '🇪🇨', 'Austria': '🇦🇹', 'Australia': '🇦🇺',
    # Pot 3
    'Norway': '🇳🇴', 'Panama': '🇵🇦', 'Egypt': '🇪🇬',
    'Algeria': '🇩🇿', 'Scotland': '🏴󠁧󠁢󠁳󠁣󠁴󠁿', 'Paraguay': '🇵🇾',
    'Tunisia': '🇹🇳', 'Ivory Coast': '🇨🇮', 'Uzbekistan': '🇺🇿',
    'Qatar': '🇶🇦', 'Saudi Arabia': '🇸🇦', 'South Africa': '🇿🇦',
    # Pot 4
    'Italy*': '🇮🇹', 'Turkiye*': '🇹🇷', 'Ukraine*': '🇺🇦',
    'Poland*': '🇵🇱', 'DR Congo*': '🇨🇩', 'Jordan': '🇯🇴',
    'Cape Verde': '🇨🇻', 'Jamaica*': '🇯🇲', 'Ghana': '🇬🇭',
    'Curacao': '🇨🇼', 'Haiti': '🇭🇹', 'New Zealand': '🇳🇿',
}


def make_team(name: str, pot: int, confederation: str) -> Team:
    """Build a team; ids are ``<name>-<pot>``."""
    return Team(
        id=f"{name}-{pot}",
        name=name,
        pot=pot,
        confederation=confederation,
        flag=FLAGS.get(name),
    )


def _pot(number: int, entries: list[tuple[str, str]]) -> tuple[Team, ...]:
    return tuple(make_team(name, number, confederation) for name, confederation in entries)


class Registry:
    """
    Pots, group names and fixed host placements for one draw format.

    Args:
        pots: Four sequences of teams, pot 1 first
        hosts: Mapping of host team id to the index of the group it opens
        group_names: Names of the groups, in order
    """

    def __init__(
        self,
        pots: list[tuple[Team, ...]],
        hosts: Optional[dict[str, int]] = None,
        group_names: Optional[list[str]] = None,
    ):
        group_names = group_names or GROUP_NAMES
        if len(pots) != TOTAL_POTS:
            raise ValueError(f"Expected {TOTAL_POTS} pots, got {len(pots)}")
        for number, pot in enumerate(pots, start=1):
            if len(pot) != len(group_names):
                raise ValueError(
                    f"Pot {number} has {len(pot)} teams for {len(group_names)} groups"
                )
            if any(team.pot != number for team in pot):
                raise ValueError(f"Pot {number} contains a team from another pot")

        self.pots = [tuple(pot) for pot in pots]
        self.hosts = dict(hosts or {})
        self.group_names = list(group_names)
        self._teams = {team.id: team for pot in self.pots for team in pot}

        for team_id, group_index in self.hosts.items():
            if team_id not in self._teams:
                raise ValueError(f"Unknown host team: {team_id}")
            if not 0 <= group_index < len(self.group_names):
                raise ValueError(f"Host group index out of range: {group_index}")

    @property
    def group_count(self) -> int:
        return len(self.group_names)

    def team(self, team_id: str) -> Optional[Team]:
        """Look up a team by id."""
        return self._teams.get(team_id)

    def all_teams(self) -> list[Team]:
        """Every team of every pot, pot 1 first."""
        return [team for pot in self.pots for team in pot]

    def host_placements(self) -> list[tuple[Team, int]]:
        """Host teams with the index of the group each one opens."""
        return [(self._teams[team_id], index) for team_id, index in self.hosts.items()]

    def empty_groups(self) -> list[Group]:
        return [Group(name=name) for name in self.group_names]

    def to_dict(self) -> dict:
        """API representation of the registry."""
        return {
            "groupNames": self.group_names,
            "pots": [
                [team.model_dump(mode="json") for team in pot]
                for pot in self.pots
            ],
            "hosts": [
                {"team": team.model_dump(mode="json"), "group": self.group_names[index]}
                for team, index in self.host_placements()
            ],
        }


POT_1 = _pot(1, [
    ('Canada (Host)', 'CONCACAF'),
    ('Mexico (Host)', 'CONCACAF'),
    ('USA (Host)', 'CONCACAF'),
    ('Spain', 'UEFA'),
    ('Argentina', 'CONMEBOL'),
    ('France', 'UEFA'),
    ('England', 'UEFA'),
    ('Brazil', 'CONMEBOL'),
    ('Portugal', 'UEFA'),
    ('Netherlands', 'UEFA'),
    ('Belgium', 'UEFA'),
    ('Germany', 'UEFA'),
])

POT_2 = _pot(2, [
    ('Croatia', 'UEFA'),
    ('Morocco', 'CAF'),
    ('Colombia', 'CONMEBOL'),
    ('Uruguay', 'CONMEBOL'),
    ('Switzerland', 'UEFA'),
    ('Japan', 'AFC'),
    ('Senegal', 'CAF'),
    ('Iran', 'AFC'),
    ('South Korea', 'AFC'),
    ('Ecuador', 'CONMEBOL'),
    ('Austria', 'UEFA'),
    ('Australia', 'AFC'),
])

POT_3 = _pot(3, [
    ('Norway', 'UEFA'),
    ('Panama', 'CONCACAF'),
    ('Egypt', 'CAF'),
    ('Algeria', 'CAF'),
    ('Scotland', 'UEFA'),
    ('Paraguay', 'CONMEBOL'),
    ('Tunisia', 'CAF'),
    ('Ivory Coast', 'CAF'),
    ('Uzbekistan', 'AFC'),
    ('Qatar', 'AFC'),
    ('Saudi Arabia', 'AFC'),
    ('South Africa', 'CAF'),
])

# * = playoff winner placeholder
POT_4 = _pot(4, [
    ('Italy*', 'UEFA'),
    ('Turkiye*', 'UEFA'),
    ('Ukraine*', 'UEFA'),
    ('Poland*', 'UEFA'),
    ('DR Congo*', 'CAF'),
    ('Jordan', 'AFC'),
    ('Cape Verde', 'CAF'),
    ('Jamaica*', 'CONCACAF'),
    ('Ghana', 'CAF'),
    ('Curacao', 'CONCACAF'),
    ('Haiti', 'CONCACAF'),
    ('New Zealand', 'OFC'),
])

# Mexico opens group A, Canada group B, USA group D
WORLD_CUP_2026 = Registry(
    pots=[POT_1, POT_2, POT_3, POT_4],
    hosts={
        'Mexico (Host)-1': 0,
        'Canada (Host)-1': 1,
        'USA (Host)-1': 3,
    },
)
