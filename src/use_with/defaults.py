from use_with.policies import ReleaseErrorPolicy

DEFAULT_TRACK_OWNERSHIP = True

DEFAULT_RELEASE_ERROR_POLICY = ReleaseErrorPolicy.SUPPRESS
