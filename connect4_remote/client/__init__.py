"""
connect4_remote.client - Thin client for remote Connect Four

The client never receives moves from the server, only board snapshots.
It infers moves by diffing snapshots, animates them one at a time,
records them locally and can replay recorded games without the network.
"""

__all__ = ['diff_snapshots', 'InferredDrop', 'AnimationQueue', 'DropAnimation',
           'GameApiClient', 'ClientGame', 'ReplayPlayer']

from connect4_remote.client.reconciler import diff_snapshots, InferredDrop
from connect4_remote.client.animation import AnimationQueue, DropAnimation
from connect4_remote.client.api_client import GameApiClient
from connect4_remote.client.controller import ClientGame
from connect4_remote.client.replay import ReplayPlayer
