from enum import StrEnum


class EventType(StrEnum):
    CONCERT = 'CONCERT'
    THEATER = 'THEATER'
    FESTIVAL = 'FESTIVAL'
    SPORT = 'SPORT'
    CONFERENCE = 'CONFERENCE'
    OTHER = 'OTHER'
