"""
MediaBridge - Passerelle unifiee vers les serveurs multimedia Emby et Jellyfin.

Ce package normalise deux protocoles de serveurs multimedia incompatibles
derriere un contrat unique, negocie un flux lisible (piste audio, transcodage)
et relaie les octets vers le client avec la semantique HTTP des requetes partielles.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, exceptions)
- services/ : Couche application (planification de flux, proxy, sessions, images)
- adapters/ : Couche infrastructure (clients Emby/Jellyfin, cache, CLI)
- infrastructure/ : Persistance SQLModel
- web/ : API FastAPI
"""
