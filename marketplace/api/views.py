# marketplace/api/views.py
"""
Szablony HTML nie sa czescia serwisu: strony zwracaja "view model"
{"view": <nazwa szablonu>, ...kontekst}, ktory renderuje frontend.
"""
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse


def render(view: str, status_code: int = 200, **context) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder({"view": view, **context}),
    )


def redirect(url: str) -> RedirectResponse:
    #303 - po POST przegladarka robi GET
    return RedirectResponse(url, status_code=303)


def text(message: str, status_code: int = 200) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status_code)
