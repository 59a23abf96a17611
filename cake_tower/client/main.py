# client/main.py
import logging

import pygame

from cake_tower.client.game_world import TowerWorld
from cake_tower.client.leaderboard import LeaderboardStore, LocalBackend, RemoteBackend
from cake_tower.client.local_store import LocalStore
from cake_tower.client.screens import GameScreen, MenuScreen
from cake_tower.client.session import Session
from cake_tower.shared.constants import APP_TITLE, BLACK, FPS, WHITE, WINDOW_H, WINDOW_W
from cake_tower.shared.game_config import Settings, load_settings

logger = logging.getLogger(__name__)


class App:
    def __init__(self, settings: Settings):
        pygame.init()
        pygame.display.set_caption(APP_TITLE)
        self.screen = pygame.display.set_mode((WINDOW_W, WINDOW_H))
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont(None, 22)
        self.settings = settings

        self.store = LocalStore(settings.data_dir / "local_store.json")
        self.session = Session(TowerWorld(), self.store)

        remote = None
        if settings.remote_enabled:
            remote = RemoteBackend(settings.server_host, settings.server_port)
        self.leaderboard = LeaderboardStore(LocalBackend(self.store), remote)

        self.screens = {
            "menu": MenuScreen(self),
            "game": GameScreen(self),
        }

        self.current = None
        self.running = True
        self.change_screen("menu")

    def change_screen(self, name, **kwargs):
        if self.current:
            self.current.on_exit()
        self.current = self.screens[name]
        self.current.on_enter(**kwargs)

    def handle_global_keys(self, event):
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.running = False

    def draw_footer(self):
        src = "global" if self.leaderboard.using_remote else "local"
        text = f"ESC: Quit | leaderboard: {src}"
        img = self.font.render(text, True, WHITE)
        rect = img.get_rect(midbottom=(WINDOW_W // 2, WINDOW_H - 8))
        shadow = self.font.render(text, True, BLACK)
        self.screen.blit(shadow, (rect.x + 1, rect.y + 1))
        self.screen.blit(img, rect)

    def run(self):
        try:
            while self.running:
                dt = self.clock.tick(FPS)

                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.running = False
                    self.handle_global_keys(event)
                    self.current.handle_event(event)

                self.session.tick(pygame.time.get_ticks())
                self.leaderboard.poll()
                self.current.update(dt)

                self.current.draw(self.screen)
                self.draw_footer()
                pygame.display.flip()

        finally:
            self.session.scheduler.stop()
            self.leaderboard.close()
            pygame.quit()


def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    App(settings).run()


if __name__ == "__main__":
    main()
