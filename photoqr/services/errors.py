class PhotoQRError(Exception):
    """Base failure of the upload pipeline, rendered as ``{"error", "code"}``."""

    status_code = 500
    code = "internal_error"


class UploadRejected(PhotoQRError):
    status_code = 400
    code = "upload_rejected"


class MissingFile(UploadRejected):
    code = "missing_file"


class UnsupportedMediaType(UploadRejected):
    code = "unsupported_media_type"


class PayloadTooLarge(UploadRejected):
    status_code = 413
    code = "payload_too_large"


class ImageProcessingError(PhotoQRError):
    code = "image_processing_failed"


class StorageError(PhotoQRError):
    code = "storage_failed"


class StorageWriteError(StorageError):
    code = "storage_write_failed"


class SigningError(StorageError):
    code = "signing_failed"


class QREncodingError(PhotoQRError):
    code = "qr_encoding_failed"
