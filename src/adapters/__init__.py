"""
Couche adaptateurs (infrastructure).

Les adaptateurs implémentent les ports définis dans core/ports/ et fournissent
des implémentations concrètes pour les systèmes externes.

Sous-packages :
- api/ : Clients des serveurs multimedia (Emby, Jellyfin), négociation
  d'authentification, cache d'images, retry

Chaque adaptateur dépend de core/ mais core/ ne dépend jamais des adaptateurs.
"""
