"""
Services Package

Business logic kept out of the routers so it can be tested without HTTP.

Current services:
- goals.py: Yearly reading goals and their progress
- library.py: Shelving, progress tracking and finish dates
- rate_limiter.py: Rate limiting with slowapi
- ratings.py: Book rating aggregation from approved reviews
- recommendations.py: Popular and genre-based recommendations
- security.py: Password hashing and JWT utilities
- social.py: Follow graph, activity recording and the feed
- stats.py: Reading statistics over a user's library
"""
