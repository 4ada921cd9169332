"""
Mock Jellyfin API responses for testing.

Contains realistic responses from a Jellyfin server. Jellyfin omits
TotalRecordCount when it is not requested.
"""

# GET /System/Info/Public
JELLYFIN_PUBLIC_INFO_RESPONSE = {
    "LocalAddress": "http://192.168.1.20:8096",
    "ServerName": "nas",
    "Version": "10.9.6",
    "ProductName": "Jellyfin Server",
    "Id": "f00d",
    "StartupWizardCompleted": True,
}

# POST /Users/AuthenticateByName
JELLYFIN_AUTH_RESPONSE = {
    "User": {"Name": "bob", "ServerId": "f00d", "Id": "jf-u1"},
    "SessionInfo": {"Id": "jf-sess"},
    "AccessToken": "jf-token-456",
    "ServerId": "f00d",
}

# GET /Users/{uid}/Items?ParentId=... (no TotalRecordCount)
JELLYFIN_ITEMS_RESPONSE = {
    "Items": [
        {
            "Name": "Dark",
            "Id": "s1",
            "Type": "Series",
            "ProductionYear": 2017,
            "ImageTags": {"Primary": "tag-s1"},
        },
        {
            "Name": "El Hoyo",
            "Id": "m3",
            "Type": "Movie",
            "ProductionYear": 2019,
            "RunTimeTicks": 56_400_000_000,
            "ImageTags": {"Primary": "tag-m3"},
        },
    ],
    "StartIndex": 0,
}

# GET /Shows/{seriesId}/Episodes?SeasonId=...
JELLYFIN_EPISODES_RESPONSE = {
    "Items": [
        {
            "Name": "Secretos",
            "Id": "e1",
            "Type": "Episode",
            "SeriesId": "s1",
            "SeriesName": "Dark",
            "SeasonId": "season1",
            "ParentIndexNumber": 1,
            "IndexNumber": 1,
            "RunTimeTicks": 30_000_000_000,
            "SeriesPrimaryImageTag": "tag-s1",
            "ImageTags": {},
        }
    ],
    "TotalRecordCount": 1,
}

# GET /Users/{uid}/Items/{id}?Fields=MediaStreams,MediaSources
# Streams only described under MediaSources
JELLYFIN_ITEM_SOURCES_RESPONSE = {
    "Name": "El Hoyo",
    "Id": "m3",
    "Type": "Movie",
    "MediaSources": [
        {
            "Id": "m3",
            "MediaStreams": [
                {"Type": "Video", "Index": 0, "Codec": "hevc"},
                {"Type": "Audio", "Index": 1, "Codec": "eac3", "Language": "eng", "IsDefault": True},
                {"Type": "Audio", "Index": 2, "Codec": "aac", "Title": "Castellano"},
            ],
        }
    ],
}
