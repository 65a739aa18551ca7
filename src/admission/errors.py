class AdmissionError(Exception):
    """Base class for errors raised while handling an admission request"""


class DecodeError(AdmissionError):
    """A non-empty payload could not be parsed into an SCC"""


class ReviewError(AdmissionError):
    """The AdmissionReview envelope is malformed"""
