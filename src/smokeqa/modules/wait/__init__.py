from .poller import PollingWaiter, WaitSpec
from .download import DownloadCompletionDetector, DownloadWait

__all__ = ["PollingWaiter", "WaitSpec", "DownloadCompletionDetector", "DownloadWait"]
