from authsome_otp.models.schema.otp import OtpEntry


class Databases:
    otp = OtpEntry
