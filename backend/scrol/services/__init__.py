# Services package init
"""
Scrol Backend — Services Layer
===============================

What:  Business logic between the routers (HTTP) and the store (persistence).
How:   Each service is a plain class with a module-level singleton. Routers
       call the singleton; tests patch it.

Service Inventory:
    - CandidateService: profile lookup, profile update, CV listing
    - FriendService:    candidate search and the friend graph
    - PhotoService:     photo lookup/streaming and photo upload
    - BlobStore:        photo object storage (FileBlobStore on local disk)
    - TokenVerifier:    identity token → verified email (httpx)
    - Notifier:         friend request notifications (httpx)
"""
