"""
Constantes globales pour MediaBridge.

Ce module contient les constantes utilisees dans l'application:
- Vocabulaire de flux (conteneurs, codecs, plafonds de debit)
- Types d'elements demandes aux backends
- Seuils de lecture
- Motifs de classement des chaines en direct
"""

# Conteneurs/codecs compatibles lecture directe dans un navigateur
DIRECT_PLAY_CONTAINERS = ("mp4", "mkv", "webm")
DIRECT_PLAY_VIDEO_CODECS = ("h264", "hevc", "vp9")
DIRECT_PLAY_AUDIO_CODECS = ("aac", "mp3", "ac3")

# Cible du transcodage force (remultiplexage pour epingler une piste)
TRANSCODE_CONTAINER = "mp4"
TRANSCODE_VIDEO_CODEC = "h264"
TRANSCODE_AUDIO_CODEC = "aac"
HLS_SEGMENT_CONTAINER = "mp4"

# Plafonds de debit (bits/s)
MAX_STREAMING_BITRATE = 100_000_000
MAX_VIDEO_BITRATE = 50_000_000
MAX_AUDIO_BITRATE = 320_000
TRANSCODE_STREAMING_BITRATE = 20_000_000
LIVE_STREAMING_BITRATE = 8_000_000

# Sondage du conteneur cote backend (Emby)
ANALYZE_DURATION_MS = 200_000
ANALYZE_SIZE_BYTES = 200_000_000

# Types d'elements
LIBRARY_ITEM_TYPES = "Movie,Series"
SEARCH_ITEM_TYPES = "Movie,Series,Episode"
IMAGE_TYPES = "Primary,Backdrop,Thumb,Logo"

# Un element est termine au-dela de ce pourcentage
PLAYBACK_COMPLETED_PERCENT = 90.0

# Classement des chaines en direct : premiere categorie dont un motif
# apparait dans le nom (insensible a la casse et aux accents)
CHANNEL_CATEGORY_PATTERNS = (
    ("news", ("news", "noticias", "info", "24h", "cnn", "bbc", "euronews")),
    ("sports", ("sport", "deportes", "espn", "eurosport", "futbol", "football", "nba")),
    ("kids", ("kids", "junior", "cartoon", "disney", "nick", "infantil", "clan")),
    ("movies", ("cine", "movie", "film", "hbo", "tcm", "paramount")),
    ("music", ("music", "musica", "mtv", "radio", "hits")),
    ("documentary", ("docu", "discovery", "history", "national geographic", "nat geo")),
)
DEFAULT_CHANNEL_CATEGORY = "general"
