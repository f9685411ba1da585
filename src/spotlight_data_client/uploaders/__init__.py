from .masthead_uploader import MastheadUploader

__all__ = ["MastheadUploader"]
