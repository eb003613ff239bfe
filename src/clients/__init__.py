from .reddit_client import RedditClient, RedditPost, get_reddit_client

__all__ = ["RedditClient", "RedditPost", "get_reddit_client"]
