from dataclasses import dataclass

from backend.periods import PeriodMode

DEFAULT_PRIZES = (250, 120, 65, 30, 15, 10, 5, 5, 0, 0)


@dataclass(frozen=True)
class Program:
    name: str
    provider: str
    mode: PeriodMode
    prizes: tuple = DEFAULT_PRIZES


PROGRAMS = {
    p.name: p
    for p in (
        Program('rainbet', 'rainbet', PeriodMode.CALENDAR_MONTH),
        Program('raw365', 'raw365', PeriodMode.ANCHORED_ROLLING),
        Program('rainbet-cycle', 'rainbet', PeriodMode.CUSTOM_EIGHTH_TO_SEVENTH),
    )
}
