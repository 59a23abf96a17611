import logging

import pygame

from cake_tower.client.scoring import share_text
from cake_tower.client.session import GAMEOVER, PLAYING
from cake_tower.client.ui import Button, TextInput
from cake_tower.shared.constants import (
    BLACK, BLUE, DARK, FIELD_X, FIELD_Y, GRAY, GREEN, HEIGHT, ORANGE, RED, SKY, WHITE, WIDTH, WINDOW_H, WINDOW_W,
)
from cake_tower.shared.errors import ValidationError

logger = logging.getLogger(__name__)

PANEL_X = FIELD_X + WIDTH + 20
PANEL_W = WINDOW_W - PANEL_X - 20
VISIBLE_LAYERS = 13


class Screen:
    name = "base"
    def __init__(self, app): self.app = app
    def on_enter(self, **kwargs): pass
    def on_exit(self): pass
    def handle_event(self, event): pass
    def update(self, dt): pass
    def draw(self, surface): pass


# -------------------- drawing helpers --------------------
def draw_layer(surface, x, y, w, style):
    w = int(round(w))
    if w <= 0:
        return
    h = style.height
    rect = pygame.Rect(int(x), int(y), w, h)
    pygame.draw.rect(surface, style.base, rect, border_radius=min(8, w // 4))
    pygame.draw.rect(surface, style.frosting, (rect.x, rect.y, w, 10), border_radius=min(6, w // 4))
    for i, c in enumerate(style.sprinkles):
        sx = rect.x + (i + 1) * w // (len(style.sprinkles) + 1)
        if w > 30:
            pygame.draw.rect(surface, c, (sx - 1, rect.y + 3, 3, 5))


def draw_debris(surface, piece):
    w = max(1, int(round(piece.width)))
    s = pygame.Surface((w, piece.style.height), pygame.SRCALPHA)
    draw_layer(s, 0, 0, w, piece.style)
    # pygame rotates counter-clockwise, the simulation spins clockwise
    rotated = pygame.transform.rotate(s, -piece.rot)
    surface.blit(rotated, rotated.get_rect(center=(int(piece.x + w / 2), int(piece.y + piece.style.height / 2))))


def draw_leaderboard(surface, font, entries, player, x, y):
    if not entries:
        surface.blit(font.render("No entries yet", True, GRAY), (x, y))
        return
    me = (player or "").lower()
    for i, e in enumerate(entries[:10]):
        label = f"#{i + 1}  {e.name}"
        if me and e.name.lower() == me:
            label += "  (YOU)"
        surface.blit(font.render(label, True, WHITE), (x, y + i * 24))
        sc = font.render(str(e.score), True, WHITE)
        surface.blit(sc, (x + PANEL_W - sc.get_width(), y + i * 24))


# -------------------- Menu --------------------
class MenuScreen(Screen):
    name = "menu"
    def __init__(self, app):
        super().__init__(app)
        self.title_font = pygame.font.SysFont(None, 64)
        self.small_font = pygame.font.SysFont(None, 26)

        cx = WINDOW_W // 2
        self.name_input = TextInput((cx - 180, 200, 360, 45), self.small_font, "Your name (required)",
                                    text=app.store.player_name())
        self.start_btn = Button((cx - 180, 260, 360, 50), "Start Game", self.small_font, GREEN, WHITE)
        self.board_btn = Button((cx - 180, 320, 360, 45), "Leaderboard", self.small_font, ORANGE, BLACK)
        self.msg = ""
        self.entries = []

    def on_enter(self, **kwargs):
        self.msg = kwargs.get("message", "")
        self.entries = self.app.leaderboard.load()

    def _start(self):
        try:
            self.app.session.start(self.name_input.value())
        except ValidationError as e:
            self.msg = str(e)
            return
        self.app.change_screen("game")

    def handle_event(self, event):
        if self.name_input.handle_event(event):
            return
        if self.start_btn.is_clicked(event):
            self._start()
        elif self.board_btn.is_clicked(event):
            self.entries = self.app.leaderboard.load()
        elif event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            self._start()

    def update(self, dt):
        self.entries = self.app.leaderboard.entries

    def draw(self, surface):
        surface.fill(DARK)
        title = self.title_font.render("Cake Tower", True, WHITE)
        surface.blit(title, title.get_rect(center=(WINDOW_W // 2, 110)))
        hint = self.small_font.render("SPACE / click to stack. Perfect stacks build combos.", True, GRAY)
        surface.blit(hint, hint.get_rect(center=(WINDOW_W // 2, 160)))

        self.name_input.draw(surface)
        self.start_btn.draw(surface)
        self.board_btn.draw(surface)

        src = "Global" if self.app.leaderboard.using_remote else "Local"
        surface.blit(self.small_font.render(f"Top Players ({src})", True, WHITE), (WINDOW_W // 2 - 180, 385))
        draw_leaderboard(surface, self.small_font, self.entries, self.name_input.value(), WINDOW_W // 2 - 180, 415)

        if self.msg:
            msg = self.small_font.render(self.msg, True, RED)
            surface.blit(msg, msg.get_rect(center=(WINDOW_W // 2, 375)))


# -------------------- Game --------------------
class GameScreen(Screen):
    name = "game"
    def __init__(self, app):
        super().__init__(app)
        self.big_font = pygame.font.SysFont(None, 44)
        self.small_font = pygame.font.SysFont(None, 24)
        self.field = pygame.Rect(FIELD_X, FIELD_Y, WIDTH, HEIGHT)

        bx = PANEL_X
        self.stack_btn = Button((bx, 140, PANEL_W, 50), "STACK IT!", self.small_font, GREEN, WHITE)
        self.quit_btn = Button((bx, 200, PANEL_W, 40), "Quit", self.small_font, GRAY, WHITE)

        self.share_btn = Button((bx, 200, PANEL_W, 40), "Share", self.small_font, BLUE, WHITE)
        self.submit_btn = Button((bx, 250, PANEL_W, 40), "Submit Score", self.small_font, ORANGE, BLACK)
        self.again_btn = Button((bx, 300, PANEL_W, 40), "Play Again", self.small_font, GREEN, WHITE)
        self.menu_btn = Button((bx, 350, PANEL_W, 40), "Main Menu", self.small_font, GRAY, WHITE)

        self.msg = ""

    def on_enter(self, **kwargs):
        self.msg = ""

    def update(self, dt):
        notice = self.app.leaderboard.take_notice()
        if notice:
            self.msg = notice

    def handle_event(self, event):
        session = self.app.session
        if event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE:
            session.action()
            return

        if session.state == PLAYING:
            if self.stack_btn.is_clicked(event):
                session.stack()
            elif self.quit_btn.is_clicked(event):
                self._to_menu()
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.field.collidepoint(event.pos):
                session.stack()
            return

        if session.state == GAMEOVER:
            if self.share_btn.is_clicked(event):
                self.msg = share_text(session.player_name, session.score)
                logger.info("Share: %s", self.msg)
            elif self.submit_btn.is_clicked(event):
                try:
                    result = self.app.leaderboard.submit(session.player_name, session.score)
                except ValidationError as e:
                    self.msg = str(e)
                else:
                    self.msg = result.message
            elif self.again_btn.is_clicked(event):
                self.msg = ""
                try:
                    session.restart()
                except ValidationError as e:
                    self.msg = str(e)
            elif self.menu_btn.is_clicked(event):
                self._to_menu()

    def _to_menu(self):
        self.app.session.quit()
        self.app.change_screen("menu")

    def draw(self, surface):
        snap = self.app.session.snapshot()
        surface.fill(DARK)
        field = surface.subsurface(self.field)
        field.fill(SKY)

        visible = snap.tower[-VISIBLE_LAYERS:]
        y = HEIGHT - 20
        for layer in visible:
            y -= layer.style.height
            draw_layer(field, layer.x, y, layer.width, layer.style)

        if snap.moving:
            draw_layer(field, snap.moving.x, 50, snap.moving.width, snap.moving.style)

        for piece in snap.debris:
            draw_debris(field, piece)

        pygame.draw.rect(surface, WHITE, self.field, 2)
        self._draw_panel(surface, snap)

    def _draw_panel(self, surface, snap):
        x = PANEL_X
        surface.blit(self.small_font.render(f"Score  {snap.score}", True, WHITE), (x, FIELD_Y))
        surface.blit(self.small_font.render(f"Best   {snap.high_score}", True, WHITE), (x, FIELD_Y + 28))
        surface.blit(self.small_font.render(f"Combo  {snap.combo}", True, WHITE), (x, FIELD_Y + 56))

        if snap.state == PLAYING:
            self.stack_btn.draw(surface)
            self.quit_btn.draw(surface)
        elif snap.state == GAMEOVER:
            head = "Nice!" if snap.score > 0 else "Womp!"
            surface.blit(self.big_font.render(head, True, WHITE), (x, 140))
            for b in (self.share_btn, self.submit_btn, self.again_btn, self.menu_btn):
                b.draw(surface)

        if self.msg:
            lines = [self.msg[i:i + 26] for i in range(0, len(self.msg), 26)]
            for i, line in enumerate(lines[:5]):
                surface.blit(self.small_font.render(line, True, GRAY), (x, WINDOW_H - 150 + i * 22))
