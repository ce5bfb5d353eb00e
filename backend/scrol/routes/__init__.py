# Routes package init
"""
Scrol Backend — API Routes Package
===================================

What:  HTTP route handlers. Routers stay thin: read the request, call a
       service singleton, shape the JSON body. Business rules live in services.

Route Inventory:
    - public.py:   GET  /find, /viewprofile, /getpicture     (no token, flag-gated)
    - profile.py:  POST /, /update, /listcvs                 (token)
    - friends.py:  POST /addfriend, /acceptfriend, /block, /myfriends (token)
    - photos.py:   POST /getpicture, /updatepicture          (token)
    - health.py:   GET  /health

Paths are matched exactly; the app is created with redirect_slashes=False.
"""
