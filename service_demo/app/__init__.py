"""
Demo service showing the response cache in front of slow handlers.

Routes:
- /not-cached: always runs the slow loader
- /cached: slow on the first call, then served from cache until the TTL lapses
- /cached/stream: chunked streaming response, cached once fully sent
"""
