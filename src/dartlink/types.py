from __future__ import annotations

from typing import Literal, NotRequired, TypedDict

type StateValue = bool | int | float | str | None
type TrafficLight = Literal["green", "yellow", "red"]


class SegmentJson(TypedDict, total=False):
    name: str
    number: int
    multiplier: int


class ThrowJson(TypedDict, total=False):
    segment: SegmentJson | None


class BoardStateJson(TypedDict):
    status: NotRequired[str]
    event: NotRequired[str]
    throws: NotRequired[list[ThrowJson]]


class CpuJson(TypedDict, total=False):
    model: str


class HostJson(TypedDict, total=False):
    clientVersion: str
    desktopVersion: str
    platform: str
    os: str
    kernelArch: str
    hostname: str
    cpu: CpuJson


class CamJson(TypedDict):
    width: int
    height: int
    fps: int


class StatusOk(TypedDict):
    ok: bool
