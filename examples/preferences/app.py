"""Preferences — cookies read by a handler and by a sibling middleware.

Demonstrates the cookie jar, chained Set-Cookie attributes, cookie
deletion, and a custom middleware that reads the cookie context through
the per-request registry.

Serve ``app`` with any ASGI server.
"""

from dataclasses import dataclass

from biscuit import App, ContextRegistry, CookieParser, Request, Response, SameSite

SUPPORTED_LANGUAGES = ("en", "de", "fr")


@dataclass
class LanguageContext:
    language: str = "en"


class LanguageMiddleware:
    """Picks the language from the ``lang`` cookie; adds Content-Language."""

    def new_context(self) -> LanguageContext:
        return LanguageContext()

    def before_handle(
        self,
        request: Request,
        response: Response,
        ctx: LanguageContext,
        contexts: ContextRegistry,
    ) -> None:
        lang = contexts.get(CookieParser).get_cookie("lang")
        if lang in SUPPORTED_LANGUAGES:
            ctx.language = lang

    def after_handle(self, request: Request, response: Response, ctx: LanguageContext) -> None:
        response.set_header("Content-Language", ctx.language)


GREETINGS = {"en": "Hello", "de": "Hallo", "fr": "Bonjour"}


def handler(request: Request, response: Response, contexts: ContextRegistry) -> str:
    cookies = contexts.get(CookieParser)
    language = contexts.get(LanguageMiddleware).language

    if request.path.startswith("/lang/"):
        choice = request.path.removeprefix("/lang/")
        cookies.set_cookie("lang", choice).path("/").max_age(365 * 24 * 3600)
        return f"Language set to {choice}"

    if request.path == "/forget":
        cookies.delete_cookie("lang", path="/")
        cookies.delete_cookie("visits", path="/")
        return "Preferences cleared"

    raw_visits = cookies.get_cookie("visits")
    visits = (int(raw_visits) if raw_visits.isdecimal() else 0) + 1
    cookies.set_cookie("visits", visits).path("/").httponly().same_site(SameSite.LAX)
    return f"{GREETINGS[language]}! Visit #{visits}"


app = App(handler, middleware=[CookieParser(), LanguageMiddleware()])
