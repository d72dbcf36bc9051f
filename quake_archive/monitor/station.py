"""
MonitoredStation model: the station-side state a monitoring window edits.
"""

from pydantic import BaseModel, Field


class MonitoredStation(BaseModel):
    """
    A seismic station as seen by a monitoring window.

    The only state the window changes is picking_disabled. It is owned by
    one consumer at a time and needs no synchronization here.

    Attributes:
        network_code: FDSN network code
        station_code: Station code
        channel_name: Channel name (e.g. "BHZ")
        location_code: Location code, often empty
        picking_disabled: Whether event picking is switched off for the station
    """

    network_code: str = Field(..., min_length=1, max_length=8)
    station_code: str = Field(..., min_length=1, max_length=8)
    channel_name: str = Field(..., min_length=1, max_length=8)
    location_code: str = ""
    picking_disabled: bool = False

    class Config:
        json_schema_extra = {
            "example": {
                "network_code": "JP",
                "station_code": "JTU",
                "channel_name": "BHZ",
                "location_code": "",
                "picking_disabled": False,
            }
        }

    @property
    def title(self) -> str:
        return (
            f"Station Monitor - {self.network_code} {self.station_code} "
            f"{self.channel_name} {self.location_code}"
        ).rstrip()

    def set_picking_disabled(self, disabled: bool) -> None:
        self.picking_disabled = disabled
