# Services module - build pipeline stages
from .git import GitCheckout
from .hugo import HugoGenerator
from .mailer import MailNotifier
from .builder import SiteBuilder

__all__ = ["GitCheckout", "HugoGenerator", "MailNotifier", "SiteBuilder"]
