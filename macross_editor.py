#!/usr/bin/env python3
"""
A lightweight SQL editor in Python (Tkinter) hosting Macross macro expansion

Features:
- New/Open/Save/Save As
- SQL syntax highlighting (Pygments)
- Line numbers
- Drop-in extensions from extensions/ (Macross macro expansion ships by default)
- Status bar and toast notifications for extensions
"""
import argparse
import logging
import os
import tkinter as tk
from tkinter import filedialog, messagebox
from typing import Optional

from extension_manager import ExtensionManager
from syntax_highlighter import SyntaxHighlighter

log = logging.getLogger("macross.editor")

FILETYPES = [('SQL Files', '*.sql'), ('Text Files', '*.txt'), ('All Files', '*.*')]


class MacrossEditorApp:
    def __init__(self, root, extensions_dir=None):
        self.root = root
        self.root.title('Macross SQL Editor')
        self.current_file: Optional[str] = None
        self.highlight_timer = None
        self._toast = None
        self._toast_timer = None
        self.dirty = False
        self._build_ui()
        self._bind_events()
        self.set_text('')
        # extensions need the menubar, text widget and status bar in place
        self.extensions = ExtensionManager(self, extensions_dir)
        self._build_extensions_menu()

    def _build_ui(self):
        menubar = tk.Menu(self.root)
        filemenu = tk.Menu(menubar, tearoff=False)
        filemenu.add_command(label='New', command=self.new_file)
        filemenu.add_command(label='Open', command=self.open_file)
        filemenu.add_command(label='Save', command=self.save_file)
        filemenu.add_command(label='Save As', command=self.save_file_as)
        filemenu.add_separator()
        filemenu.add_command(label='Exit', command=self.on_close)
        menubar.add_cascade(label='File', menu=filemenu)

        self.tools_menu = tk.Menu(menubar, tearoff=False)
        menubar.add_cascade(label='Tools', menu=self.tools_menu)
        self.extensions_menu = tk.Menu(menubar, tearoff=False)
        menubar.add_cascade(label='Extensions', menu=self.extensions_menu)

        self.root.config(menu=menubar)

        top_frame = tk.Frame(self.root)
        top_frame.pack(fill='both', expand=True)

        self.line_numbers = tk.Text(top_frame, width=5, padx=3, takefocus=0, bd=0, bg='#f0f0f0', fg='gray', state='disabled')
        self.line_numbers.pack(side='left', fill='y')

        self.text = tk.Text(top_frame, wrap='none', undo=True, font=('Consolas', 12))
        self.text.pack(side='left', fill='both', expand=True)

        xscroll = tk.Scrollbar(self.root, orient='horizontal', command=self.text.xview)
        xscroll.pack(fill='x')
        self.text.configure(xscrollcommand=xscroll.set)

        self.status_var = tk.StringVar()
        self.status_var.set('Ready')
        status = tk.Label(self.root, textvariable=self.status_var, relief='sunken', anchor='w')
        status.pack(side='bottom', fill='x')

        self.highlighter = SyntaxHighlighter(self.text)
        self.highlighter.create_tags()

    def _bind_events(self):
        # extensions see key presses before the Text class binding inserts them
        self.text.bind('<KeyPress>', self._on_key_press)
        self.text.bind('<KeyRelease>', self._on_key_release)
        self.text.bind('<Button-1>', lambda e: self.update_line_numbers())
        self.text.bind('<MouseWheel>', lambda e: self.update_line_numbers())
        self.root.protocol('WM_DELETE_WINDOW', self.on_close)

    def _build_extensions_menu(self):
        self.extensions_menu.delete(0, 'end')
        self._ext_vars = {}
        for mod_name, info in self.extensions.extensions.items():
            var = tk.BooleanVar(value=info.enabled)
            self._ext_vars[mod_name] = var
            self.extensions_menu.add_checkbutton(
                label=f'{info.icon} {info.name} {info.version}',
                variable=var,
                command=lambda m=mod_name: self._toggle_extension(m),
            )
        if not self.extensions.extensions:
            self.extensions_menu.add_command(label='(no extensions)', state='disabled')

    def _toggle_extension(self, mod_name):
        if self._ext_vars[mod_name].get():
            self.extensions.enable(mod_name)
        else:
            self.extensions.disable(mod_name)
        info = self.extensions.extensions[mod_name]
        if info.error:
            messagebox.showerror('Extension error', f'{info.name} failed to activate:\n\n{info.error}')
            self._ext_vars[mod_name].set(False)
            info.enabled = False

    def _on_key_press(self, event):
        return self.extensions.dispatch_key(event)

    def _on_key_release(self, event):
        self.set_dirty(True)
        self.update_line_numbers()
        self.update_highlight()

    # ── Notifications ────────────────────────────────────────────────
    def _show_toast(self, message, duration_ms=3000):
        self._hide_toast()
        self._toast = tk.Label(self.root, text=message, bg='#313244', fg='#cdd6f4',
                               padx=12, pady=6, font=('Segoe UI', 10))
        self._toast.place(relx=1.0, rely=1.0, x=-12, y=-40, anchor='se')
        self._toast_timer = self.root.after(duration_ms, self._hide_toast)

    def _hide_toast(self):
        if self._toast_timer:
            self.root.after_cancel(self._toast_timer)
            self._toast_timer = None
        if self._toast is not None:
            self._toast.destroy()
            self._toast = None

    # ── Files ────────────────────────────────────────────────────────
    def new_file(self):
        if not self.confirm_discard():
            return
        self.current_file = None
        self.set_text('')
        self.status_var.set('New file')

    def confirm_discard(self):
        if not self.dirty:
            return True
        resp = messagebox.askyesnocancel('Unsaved changes', 'You have unsaved changes. Save before continuing?')
        if resp is None:
            return False
        if resp is True:
            return self.save_file()
        return True

    def set_dirty(self, v: bool):
        self.dirty = v
        self.text.edit_modified(bool(v))

    def open_file(self, path=None):
        if path is None:
            if not self.confirm_discard():
                return
            path = filedialog.askopenfilename(title='Open SQL file', filetypes=FILETYPES)
        if not path:
            return
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                self.set_text(f.read())
        except OSError as exc:
            log.error('Could not open %s: %s', path, exc)
            messagebox.showerror('Open failed', str(exc))
            return
        self.current_file = path
        self.status_var.set(f'Opened {os.path.basename(path)}')

    def save_file(self):
        if self.current_file is None:
            return self.save_file_as()
        try:
            with open(self.current_file, 'w', encoding='utf-8') as f:
                f.write(self.get_text())
        except OSError as exc:
            log.error('Could not save %s: %s', self.current_file, exc)
            messagebox.showerror('Save failed', str(exc))
            return False
        self.status_var.set(f'Saved {os.path.basename(self.current_file)}')
        self.set_dirty(False)
        return True

    def save_file_as(self):
        path = filedialog.asksaveasfilename(defaultextension='.sql', filetypes=FILETYPES)
        if not path:
            return False
        self.current_file = path
        return self.save_file()

    def set_text(self, txt):
        self.text.delete('1.0', 'end')
        self.text.insert('1.0', txt)
        self.update_line_numbers()
        self.update_highlight()
        self.set_dirty(False)

    def get_text(self):
        return self.text.get('1.0', 'end-1c')

    # ── View ─────────────────────────────────────────────────────────
    def update_line_numbers(self):
        count = int(self.text.index('end-1c').split('.')[0])
        width = len(str(count))
        self.line_numbers.config(state='normal')
        self.line_numbers.delete('1.0', 'end')
        self.line_numbers.insert('1.0', '\n'.join(f'{i}'.rjust(width) for i in range(1, count + 1)))
        self.line_numbers.config(state='disabled')

    def update_highlight(self):
        if self.highlight_timer:
            self.root.after_cancel(self.highlight_timer)
        self.highlight_timer = self.root.after(150, self._highlight)

    def _highlight(self):
        self.highlight_timer = None
        self.highlighter.highlight_all('sql')

    def on_close(self):
        if self.confirm_discard():
            self.extensions.shutdown_all()
            self.root.destroy()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='macross-editor', description='SQL editor with Macross macro expansion')
    parser.add_argument('file', nargs='?', help='SQL file to open')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='logging verbosity (default: INFO)')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    root = tk.Tk()
    app = MacrossEditorApp(root)
    if args.file:
        app.open_file(args.file)
    root.minsize(640, 480)
    root.mainloop()


if __name__ == '__main__':
    main()
