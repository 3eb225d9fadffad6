from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class ChannelMetadata(BaseModel):
    """Locally curated metadata for one upstream channel"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    issue_id: str = Field(..., alias="issue-id", min_length=1, description="Upstream issue/product id")
    name: str = Field("", description="Display name used in the playlist")
    tvg_id: str = Field("", alias="tvg-id", description="EPG channel id")
    tvg_name: str = Field("", alias="tvg-name", description="EPG channel name")
    group: str = Field("", description="Playlist group label")
    logo: str = Field("", description="Logo URL")


class ChannelsFile(BaseModel):
    """Shape of the local channel metadata file"""
    channels: list[ChannelMetadata] = Field(default_factory=list)


class UpstreamModel(BaseModel):
    """
    Base for records decoded from the upstream service.

    Upstream is loose about types: numbers arrive where strings are expected
    and fields are sometimes null. Both are normalised to strings, and keys
    this model does not declare are kept so a record can be dumped back
    without losing data.
    """
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ProgramEntry(UpstreamModel):
    """One EPG entry embedded in a live channel record"""
    epg_media_id: str = ""
    epg_prod_name: str = ""
    start_datetime: str = ""
    description: str = ""
    epg_start: str = ""
    epg_end: str = ""
    epg_duration: str = ""
    epg_position: str = ""
    epg_progress: str = ""
    start_time_unix: str = ""
    end_time_unix: str = ""


class LiveChannel(UpstreamModel):
    """One variant of a live channel as listed in the upstream catalog"""
    product_id: str = ""
    product_media: str = ""
    product_group_id: str = ""
    product_file_tag: str = ""
    product_name: str = ""
    issues_name: str = ""
    media_name: str = ""
    media_file_tag: str = ""
    issues_id: str = ""
    issues_prod_id: str = ""
    issues_url: str = ""
    dvr: str = ""
    dvr_duration: str = ""
    hls_url: str = ""
    program: list[ProgramEntry] = Field(default_factory=list)


# A catalog group holds every variant of one logical channel; an empty group
# carries no channel and is treated as a malformed catalog.
CatalogGroup = Annotated[list[LiveChannel], Field(min_length=1)]

catalog_adapter = TypeAdapter(list[CatalogGroup])


class PlayLink(UpstreamModel):
    """Stream resolution response"""
    play_link: str = ""
