# torneo_backend/services/group_qualifiers.py
# Group stage tables, qualifiers and the pairs that open the knockout bracket.

from typing import Dict, List, Sequence

from torneo_backend.core.config import MIN_GROUP_COUNT, PAIRING_CHUNK_SIZE, QUALIFIER_LABELS
from torneo_backend.core.logging_config import get_logger
from torneo_backend.models.bracket_model import KnockoutPair, Qualifier, QualifierResult, Zone, ZoneTable
from torneo_backend.models.competition_model import CompetitionConfig
from torneo_backend.models.match_model import Match, is_knockout, is_played
from torneo_backend.models.team_model import Team
from torneo_backend.services.generate_fixtures import group_label, split_into_groups
from torneo_backend.services.standings import standings_for_config

logger = get_logger(__name__)


def collect_zones(teams: Sequence[Team], matches: Sequence[Match], zones_count: int = MIN_GROUP_COUNT) -> List[Zone]:
    """
    Rebuilds the groups of a cup from its matches, sorted by label.
    Teams appear in a zone in the order they first show up in its matches.
    Before any group match exists, teams are dealt by name into `zones_count` groups.
    """
    teams_by_id = {team.id: team for team in teams}
    zone_teams: Dict[str, Dict[int, Team]] = {}
    zone_matches: Dict[str, List[Match]] = {}

    for match in matches:
        if not match.zone or is_knockout(match):
            continue
        members = zone_teams.setdefault(match.zone, {})
        zone_matches.setdefault(match.zone, []).append(match)
        for team_id in (match.home_team_id, match.away_team_id):
            if team_id in teams_by_id:
                members.setdefault(team_id, teams_by_id[team_id])

    if not zone_teams and teams:
        ordered = sorted(teams, key=lambda team: team.name)
        return [
            Zone(label=group_label(index), teams=group)
            for index, group in enumerate(split_into_groups(ordered, max(MIN_GROUP_COUNT, zones_count)))
        ]

    return [
        Zone(label=label, teams=list(zone_teams[label].values()), matches=zone_matches[label])
        for label in sorted(zone_teams)
    ]


def zone_table(zone: Zone, config: CompetitionConfig) -> ZoneTable:
    """Standings of one zone; complete once it has matches and all of them are played."""
    return ZoneTable(
        label=zone.label,
        standings=standings_for_config(zone.teams, zone.matches, config),
        complete=bool(zone.matches) and all(is_played(match) for match in zone.matches),
    )


def pair_qualifiers(qualifiers: Sequence[Qualifier]) -> List[KnockoutPair]:
    """
    Pairs qualifiers for the first knockout round.
    - Qualifiers are sorted by label ("1ro Grupo A" < "1ro Grupo B" < ... < "2do Grupo D")
    - Each chunk of four gives (1st v 4th) and (2nd v 3rd)
    - A trailing chunk of fewer than four is left out
    - Pairs missing a team on either side are left out
    """
    ordered = sorted(qualifiers, key=lambda qualifier: qualifier.label)
    pairs: List[KnockoutPair] = []
    for start in range(0, len(ordered), PAIRING_CHUNK_SIZE):
        chunk = ordered[start:start + PAIRING_CHUNK_SIZE]
        if len(chunk) < PAIRING_CHUNK_SIZE:
            logger.warning(f"Dropping {len(chunk)} qualifier(s) that do not fill a chunk of {PAIRING_CHUNK_SIZE}")
            continue
        for home, away in ((chunk[0], chunk[3]), (chunk[1], chunk[2])):
            if home.team_id is None or away.team_id is None:
                continue
            pairs.append(KnockoutPair(home=home, away=away))
    return pairs


def resolve_qualifiers(zones: Sequence[Zone], config: CompetitionConfig) -> QualifierResult:
    """
    Runs the table of every zone and lists its qualifiers.
    Undecided positions are placeholders with a label and no team.
    Pairs are only produced once every zone is complete.
    """
    tables = [zone_table(zone, config) for zone in zones]

    qualifiers: List[Qualifier] = []
    for table in tables:
        for position, prefix in enumerate(QUALIFIER_LABELS):
            label = f"{prefix} {table.label}"
            decided = table.complete and position < len(table.standings)
            qualifiers.append(Qualifier(
                label=label,
                team_id=table.standings[position].team_id if decided else None,
            ))

    complete = bool(tables) and all(table.complete for table in tables)
    pairs = pair_qualifiers(qualifiers) if complete else []
    return QualifierResult(tables=tables, qualifiers=qualifiers, pairs=pairs)
