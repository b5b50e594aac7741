"""i18n-sync — localization drift checker for documentation sites."""

__version__ = "0.3.0"
