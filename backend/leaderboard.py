from dataclasses import dataclass

from backend.periods import isoformat_z, as_utc

TOP_N = 10
PRIZE_SLOTS = 10


@dataclass(frozen=True)
class WagerRecord:
    identifier: str
    amount: float


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    wager: float

    def to_dict(self):
        return {'name': self.name, 'wager': self.wager}


@dataclass(frozen=True)
class PrizeSlot:
    position: int
    reward: float

    def to_dict(self):
        return {'position': self.position, 'reward': self.reward}


@dataclass(frozen=True)
class LeaderboardPayload:
    leaderboard: tuple
    prizes: tuple
    start_time: str
    end_time: str

    def to_dict(self):
        return {
            'leaderboard': [e.to_dict() for e in self.leaderboard],
            'prizes': [p.to_dict() for p in self.prizes],
            'startTime': self.start_time,
            'endTime': self.end_time,
        }


def mask_identifier(name):
    # first 2 + *** + last 2, short names untouched
    if len(name) <= 4:
        return name
    return name[:2] + '***' + name[-2:]


def prize_slots(prize_table):
    if len(prize_table) != PRIZE_SLOTS:
        raise ValueError('prize table needs exactly %d entries, got %d' % (PRIZE_SLOTS, len(prize_table)))
    return tuple(PrizeSlot(position=i + 1, reward=r) for i, r in enumerate(prize_table))


def build(records, prize_table, window, filter_non_positive=False):
    """Rank ``records`` into a top-10 masked leaderboard for ``window``.

    Ties keep their input order. Prize slots are always emitted in full.
    """
    prizes = prize_slots(prize_table)
    if filter_non_positive:
        records = [r for r in records if r.amount > 0]
    ranked = sorted(records, key=lambda r: r.amount, reverse=True)[:TOP_N]
    return LeaderboardPayload(
        leaderboard=tuple(LeaderboardEntry(mask_identifier(r.identifier), r.amount) for r in ranked),
        prizes=prizes,
        start_time=isoformat_z(window.start),
        end_time=isoformat_z(window.end),
    )


def percentage_left(window, now):
    now = as_utc(now)
    total = (window.end - window.start).total_seconds()
    remaining = (window.end - now).total_seconds()
    pct = max(0.0, min(100.0, remaining / total * 100))
    return round(pct, 2)
