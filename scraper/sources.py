"""Static catalog of harvest targets."""

from typing import List, Optional

from .models import Instruction, Reader, Source, SourceKey, Status

INSTRUCTION_MAIN = Instruction(description="", status=Status.ACTIVE)

UA_SOURCES: List[Source] = [
    Source(
        id=1,
        name="Football UA",
        key=SourceKey.FOOTBALL_UA,
        url="https://football.ua/ukraine.html",
        reader=Reader.SCRAPPER,
        period=3,
        status=Status.ACTIVE,
        instructions=(INSTRUCTION_MAIN,),
    ),
]


def get_sources() -> List[Source]:
    return list(UA_SOURCES)


def get_active_sources() -> List[Source]:
    return [s for s in UA_SOURCES if s.is_active]


def get_source(key: str) -> Optional[Source]:
    for source in UA_SOURCES:
        if source.key.value == key:
            return source
    return None
