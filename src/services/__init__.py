"""
Application services layer (use cases).

Services orchestrate the domain logic to fulfill application use cases.
They coordinate between entities, ports, and external systems.

This layer contains:
- StreamPlanner: playable stream negotiation (audio track, transcode fallback)
- RangeProxy: byte-range relay from backend to client
- SessionRegistry: active connection pointer and persisted client sessions
- ImageResolver: display image fallback chain
- PlaybackTracker: playback reports and persisted progress
- LiveTvService: channel categorization

Services depend on ports (interfaces) from core/, never on concrete
implementations from adapters/.
"""
