from pydantic import BaseModel, Field


class ParticipantCreate(BaseModel):
    name: str = Field(..., min_length=1)


class ParticipantRename(BaseModel):
    name: str = Field(..., min_length=1)


class ParticipantMove(BaseModel):
    index: int


class RestrictionToggle(BaseModel):
    giver: str = Field(..., min_length=1)
    restricted: str = Field(..., min_length=1)
