from compute_firewall.infra.http import Auth, BearerAuth, GoogleAuth, HttpClient, HttpError

__all__ = ["Auth", "BearerAuth", "GoogleAuth", "HttpClient", "HttpError"]
